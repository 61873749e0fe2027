import logging
import sys
import types
import uuid
import importlib.util
from pathlib import Path


def _find_server_py() -> Path:
    # Try common layouts:
    # 1) <root>/server.py
    # 2) <root>/server/server.py
    # 3) <root>/src/server/server.py
    root = Path(__file__).resolve().parents[2]
    candidates = [
        root / "server.py",
        root / "server" / "server.py",
        root / "src" / "server" / "server.py",
    ]
    for p in candidates:
        if p.exists():
            return p
    raise FileNotFoundError(f"Could not find server.py. Tried: {candidates}")


def _install_fake_modules(monkeypatch, captures: dict):
    # ---- Fake mcp.server.fastmcp.FastMCP ----
    mcp_mod = types.ModuleType("mcp")
    mcp_server_mod = types.ModuleType("mcp.server")
    fastmcp_mod = types.ModuleType("mcp.server.fastmcp")

    class DummyFastMCP:
        def __init__(self, name: str):
            captures["fastmcp_name"] = name
            captures["mcp_instance"] = self
            self.run_calls = []

        def run(self, *, transport: str):
            self.run_calls.append({"transport": transport})
            captures["run_calls"] = list(self.run_calls)

    fastmcp_mod.FastMCP = DummyFastMCP

    # Mark package structure
    mcp_mod.__path__ = []
    mcp_server_mod.__path__ = []

    monkeypatch.setitem(sys.modules, "mcp", mcp_mod)
    monkeypatch.setitem(sys.modules, "mcp.server", mcp_server_mod)
    monkeypatch.setitem(sys.modules, "mcp.server.fastmcp", fastmcp_mod)

    # ---- Fake config ----
    config_mod = types.ModuleType("config")
    config_mod.CACHE_SWEEP_ON_WRITE = False
    config_mod.CACHE_FALLBACK_ENTRY_BYTES = 512
    config_mod.CACHE_BYTES_PER_CHAR = 4
    config_mod.LOG_LEVEL = "DEBUG"
    monkeypatch.setitem(sys.modules, "config", config_mod)

    # ---- Fake cache ----
    core_pkg = types.ModuleType("core")
    core_pkg.__path__ = []
    monkeypatch.setitem(sys.modules, "core", core_pkg)

    cache_mod = types.ModuleType("core.cache")

    class FakeCacheManager:
        def __init__(self, *, sweep_on_write=True, fallback_entry_bytes=1024, bytes_per_char=2):
            captures["cache_ctor_calls"] = captures.get("cache_ctor_calls", []) + [
                {
                    "sweep_on_write": sweep_on_write,
                    "fallback_entry_bytes": fallback_entry_bytes,
                    "bytes_per_char": bytes_per_char,
                }
            ]
            captures["cache_instance"] = self

    cache_mod.CacheManager = FakeCacheManager
    monkeypatch.setitem(sys.modules, "core.cache", cache_mod)

    # ---- Fake tools + resources ----
    def _ensure_pkg(name: str):
        pkg = types.ModuleType(name)
        pkg.__path__ = []
        monkeypatch.setitem(sys.modules, name, pkg)

    _ensure_pkg("tools")
    _ensure_pkg("resources")

    tools_admin_mod = types.ModuleType("tools.cache_admin")
    res_mod = types.ModuleType("resources.cache_stats")

    def register_cache_admin(mcp, *, cache):
        captures["register_cache_admin_calls"] = captures.get("register_cache_admin_calls", []) + [
            {"mcp": mcp, "cache": cache}
        ]

    def register_resources(mcp, *, cache):
        captures["register_resources_calls"] = captures.get("register_resources_calls", []) + [
            {"mcp": mcp, "cache": cache}
        ]

    tools_admin_mod.register = register_cache_admin
    res_mod.register_resources = register_resources

    monkeypatch.setitem(sys.modules, "tools.cache_admin", tools_admin_mod)
    monkeypatch.setitem(sys.modules, "resources.cache_stats", res_mod)


def _load_server_module(monkeypatch, captures: dict):
    _install_fake_modules(monkeypatch, captures)

    server_path = _find_server_py()
    mod_name = f"server_under_test_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(mod_name, server_path)
    assert spec and spec.loader

    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, mod_name, module)
    spec.loader.exec_module(module)
    return module


def test_server_register_all_and_di(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)

    # FastMCP created with correct name
    assert captures["fastmcp_name"] == "ledger-cache"
    mcp = captures["mcp_instance"]

    # One cache, built from config
    assert captures["cache_ctor_calls"] == [
        {"sweep_on_write": False, "fallback_entry_bytes": 512, "bytes_per_char": 4}
    ]
    cache = captures["cache_instance"]
    assert module.cache is cache

    # Tools and resources share the SAME injected cache instance
    assert captures["register_cache_admin_calls"] == [{"mcp": mcp, "cache": cache}]
    assert captures["register_resources_calls"] == [{"mcp": mcp, "cache": cache}]


def test_server_main_configures_logging_and_runs_stdio(monkeypatch):
    captures = {}
    module = _load_server_module(monkeypatch, captures)

    levels = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: levels.append(kw.get("level")))

    module.main()
    assert levels == ["DEBUG"]
    assert captures["run_calls"] == [{"transport": "stdio"}]

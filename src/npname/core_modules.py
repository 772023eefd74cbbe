"""Node.js built-in module names that cannot be used as package names."""

BUILTIN_MODULES = frozenset({
    # internal http
    "_http_agent",
    "_http_client",
    "_http_common",
    "_http_incoming",
    "_http_outgoing",
    "_http_server",
    # internal stream
    "_stream_duplex",
    "_stream_passthrough",
    "_stream_readable",
    "_stream_transform",
    "_stream_wrap",
    "_stream_writable",
    # internal tls
    "_tls_common",
    "_tls_wrap",
    "assert",
    "assert/strict",
    "async_hooks",
    "events",
    "buffer",
    "string_decoder",
    "punycode",
    "child_process",
    "cluster",
    "worker_threads",
    "console",
    "inspector",
    "inspector/promises",
    "constants",
    "crypto",
    "diagnostics_channel",
    "perf_hooks",
    "trace_events",
    "dns",
    "dns/promises",
    "domain",
    "fs",
    "fs/promises",
    "dgram",
    "http",
    "http2",
    "https",
    "net",
    "tls",
    "module",
    "os",
    "process",
    "sys",
    "v8",
    "vm",
    "path",
    "path/posix",
    "path/win32",
    "querystring",
    "url",
    "readline",
    "readline/promises",
    "repl",
    "stream",
    "stream/consumers",
    "stream/promises",
    "stream/web",
    "timers",
    "timers/promises",
    "tty",
    "util",
    "util/types",
    "wasi",
    "zlib",
    # only reachable with the node: prefix
    "node:sea",
    "node:sqlite",
    "node:test",
    "node:test/reporters",
})

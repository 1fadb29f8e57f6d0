"""
PCUI - Personium Cell/Box command-line shell.

- core/: Configuration, logging, exceptions, shared utilities
- client/: HTTP transport, session login, Cell and Box resource clients
- shell/: Command grammar, navigation state machine, message channel, REPL
"""

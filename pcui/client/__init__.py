"""
Personium Client Module.

- transport: synchronous HTTP adapter (httpx), bearer auth, failure folding
- session: password-grant login producing a Session
- cell / box: resource clients returning OperationResult values
- webdav: PROPFIND multistatus parsing
"""

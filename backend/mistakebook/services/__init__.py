"""
Mistake Book Backend: Services Layer
=====================================

Service Inventory:
    - FileStore (abstract): read / create / sha-guarded update of a remote text file
    - GiteeFileStore: FileStore over the Gitee v5 contents API
    - InMemoryFileStore: FileStore over a dict (development, tests)
    - formatter: header / entry rendering, question counting, count field rewrite
    - retry: bounded linear-backoff retry for store writes
    - MistakeBookService: push and stats workflows
"""

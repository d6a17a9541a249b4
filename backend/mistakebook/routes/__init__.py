"""
Mistake Book Backend: API Routes Package
=========================================

Route Inventory:
    - push.py:    POST /api/push             (append an entry to a book)
    - stats.py:   GET  /api/stats/{subject}  (question count of a book)
    - health.py:  GET  /api/health           (configuration status)

Routes stay thin: they read the request, call MistakeBookService and shape
the JSON. Errors are raised, and the handlers in main.py format them.
"""

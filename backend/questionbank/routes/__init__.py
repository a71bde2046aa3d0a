"""
Questions Unlimited Backend: API Routes Package
================================================

Route Inventory:
    - questions.py:  /api/v1/questions…                (question CRUD, paging)
    - answers.py:    /api/v1/questions/{id}/answer     (answer CRUD)
    - health.py:     GET /health                       (service health check)
    - web.py:        GET /, GET /index.html            (page + client view)

Routes stay thin: pull values out of the request, call a service, pick the
status code. Errors travel as exceptions to the handlers in main.py.
"""

"""
DevCamper API — Routes Package
===============================

Route Inventory (resource routers are mounted under /api/v1):
    - bootcamps.py: /bootcamps, /bootcamps/{id}, /bootcamps/radius/{zipcode}/{distance},
                    /bootcamps/{id}/photo
    - courses.py:   /courses, /courses/{id}, /bootcamps/{id}/courses
    - reviews.py:   /reviews, /reviews/{id}, /bootcamps/{id}/reviews
    - auth.py:      /auth/*
    - users.py:     /users, /users/{id} (admin)
    - health.py:    /health (unprefixed)

Routes stay thin: parse the request, call a service from the AppContext,
wrap the result in a response envelope.
"""

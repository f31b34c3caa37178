"""
DevCamper API — Services Layer
===============================

Business rules between the routes (HTTP) and the database.

Service Inventory:
    - access_policy:    ownership / role decisions (pure functions)
    - BootcampService:  CRUD, radius search, photo upload
    - CourseService:    CRUD + bootcamp average cost
    - ReviewService:    CRUD + bootcamp average rating
    - UserService:      admin user management
    - AuthService:      register, login, password update and reset
    - query_service:    filtering, sorting and pagination for list endpoints
    - Geocoder:         address / zipcode → coordinates (Nominatim over httpx)
    - PhotoStorage:     upload validation and storage (aiofiles)
    - Mailer:           SMTP delivery (aiosmtplib)
    - geo:              spherical-cap math for radius search

Mutating service methods commit before returning, so a route only answers
once its write is durable. `get_db_session` rolls back on error.
"""

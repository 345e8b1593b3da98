"""
Data Transfer Objects (DTOs) Layer

DTOs decouple the API layer and the services from the persisted records.

Structure:
- response/: DTOs for outgoing API responses
- internal/: DTOs for service-to-service communication
"""

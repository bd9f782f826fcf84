"""
Services layer - business logic for reports, review, sessions and relay.

- Routes stay thin; validation and state rules live here
- Services are plain classes behind get_*_service() singletons
"""

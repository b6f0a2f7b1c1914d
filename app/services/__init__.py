"""
Services layer - business logic for reports, users, media and maps.

Services talk to Firestore and the external hosts; routes only translate
their results and exceptions into HTTP.
"""

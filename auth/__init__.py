"""auth/ -- Credential lifecycle for guardian accounts.

Layer rule: auth/ imports only stdlib + third-party libraries.
It does NOT import from api/ or core/. Configuration values reach auth/
through constructor arguments, never through get_settings().
api/ imports from auth/, not the other way around.
"""

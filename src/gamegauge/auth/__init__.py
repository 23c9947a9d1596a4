"""Authentication and authorization.

Learn: Every protected request goes through the same pipeline:
1. Bearer token in the Authorization header → TokenService (jwt.py)
2. Subject (the user's email) → CredentialStore (credentials.py)
3. Resolved identity → CurrentIdentity, passed explicitly to services

Login itself is email/password (password.py, bcrypt) guarded by a
reCAPTCHA oracle (recaptcha.py). Ownership is enforced later, by the
board service, never by the gateway.
"""

"""Core services for the resume builder application.

Holds configuration, password and token handling, session resolution,
input validation and the notification log used by the builder and the
authentication flow.

Notes:
    1. This file does not perform any operations and is used solely for package initialization.

"""

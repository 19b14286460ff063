"""Event Points package.

Feature modules (users, attendance, events, enrollments, settings,
notifications) with a thin Flask controller layer on top of service and
repository layers.
"""

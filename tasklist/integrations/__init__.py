"""
Third-party integrations.

- sentry: error tracking (enabled when SENTRY_DSN is set)
"""

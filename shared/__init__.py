"""
Shared utilities for the ContactsManager server SDK.

This package aggregates common building blocks consumed by the SDK and
its services:

- config: Credential and service configuration via pydantic-settings
- logging: Structured logging with correlation and secret redaction
- errors: Canonical error types and responses
- base_service: FastAPI application scaffolding

Any cross-cutting logic should live here to avoid import cycles. Do not
import from service_* packages into shared/.
"""

"""
Unit tests for the Todo API pipeline.

Test individual components in isolation:
- Retry policy (status/exception classification, backoff table)
- Retry orchestrator (attempt loop, hooks, cancellation)
- Mock router (rule precedence, canned payloads)
- Traffic logger (body transparency, truncation, placeholders)
- Pipeline composition, environment providers, diagnostics
"""

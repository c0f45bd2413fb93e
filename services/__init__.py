"""Service layer for the recovery timeline engine.

Services hold all date and streak rules, keeping callers (screens, API
handlers, the CLI) thin. Layer hierarchy:
    Callers (I/O, rendering) -> Services (pure computation)

Services should:
- Take already-fetched records and an explicit "now"/timezone
- Return pydantic schema objects or plain values
- Raise InvalidDateFormatError / InvalidTimezoneError for bad stored data

Services should NOT:
- Read from or write to storage
- Log, retry, or substitute defaults for malformed data
- Read the wall clock when a "now" parameter is available
"""

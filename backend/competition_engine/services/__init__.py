"""
Services Layer

Competition engine logic that:
- Accepts domain inputs (IDs, an EngineRepository)
- Returns Ok(value) / Err(EngineError) results instead of raising for domain failures
- Does NOT depend on HTTP request/response objects
- Owns the transaction of every mutating operation (one per call)
"""

"""
Integration tests package.

Tests de integración que verifican el funcionamiento correcto de:
- RentalLedger sobre el store in-memory
- Repositorios SQL sobre SQLite in-memory (aiosqlite)
- API HTTP (FastAPI TestClient)

Para ejecutar solo tests de integración:
    pytest tests/integration/
"""

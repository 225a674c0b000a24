import pytest


@pytest.fixture
def sample_projection_dict() -> dict:
    return {
        "id": "p-1",
        "name": "Baseline",
        "createdAt": "2026-01-05T10:00:00Z",
        "settings": {
            "initialBalance": 10000,
            "projectionYears": 2,
            "monthlyReturnRate": 0.5,
            "investmentAllocation": 75,
        },
        "transactions": [
            {
                "id": "salary",
                "description": "Salary",
                "amount": 3000,
                "type": "income",
                "frequency": "monthly",
                "startDate": "2026-01-01",
                "color": "#22c55e",
                "enabled": True,
            },
            {
                "id": "rent",
                "description": "Rent",
                "amount": 1200,
                "type": "expense",
                "frequency": "monthly",
                "startDate": "2026-01-01",
                "color": "#ef4444",
                "enabled": True,
            },
            {
                "id": "insurance",
                "description": "Car insurance",
                "amount": 600,
                "type": "expense",
                "frequency": "yearly",
                "startDate": "2026-03-15",
                "color": "#f97316",
                "enabled": True,
            },
            {
                "id": "laptop",
                "description": "New laptop",
                "amount": 1800,
                "type": "expense",
                "frequency": "once",
                "startDate": "2026-06-20",
                "color": "#a855f7",
                "enabled": False,
            },
        ],
    }

import copy
import json

import pytest

VALID_RESULT = {
    "detectedLanguage": "python",
    "issues": [
        {
            "type": "bug",
            "severity": "high",
            "line": 3,
            "description": "Division by zero when items is empty",
            "suggestion": "Guard the empty case before dividing.",
        },
        {
            "type": "best-practice",
            "severity": "low",
            "description": "Missing docstring",
            "suggestion": "Document the function.",
        },
    ],
    "optimizedCode": "def mean(items):\n    return sum(items) / len(items) if items else 0.0\n",
    "explanation": "### 🛠️ CORRECTED CODE\n```python\n...\n```",
    "documentation": "## mean\nReturns the arithmetic mean.",
    "overallScore": 7.5,
    "detailedScores": {
        "quality": 7,
        "readability": 8,
        "optimization": 6,
        "security": 9,
        "technicalDebt": 7,
        "styleConsistency": 8,
    },
    "complexity": {"time": "O(n)", "space": "O(1)", "cyclomatic": 2},
}


@pytest.fixture
def valid_result() -> dict:
    return copy.deepcopy(VALID_RESULT)


@pytest.fixture
def valid_json(valid_result) -> str:
    return json.dumps(valid_result)


VALID_REFACTOR = {
    "explanation": "Renamed `total` to `grand_total` in both modules.",
    "dependencyGraph": "- views.py -> models.py",
    "modifiedFiles": [
        {"name": "models.py", "content": "grand_total = 0\n"},
        {"name": "views.py", "content": "from models import grand_total\n"},
    ],
}


@pytest.fixture
def valid_refactor() -> dict:
    return copy.deepcopy(VALID_REFACTOR)


@pytest.fixture
def refactor_json(valid_refactor) -> str:
    return json.dumps(valid_refactor)

"""지자체 세율 규칙 엔진"""

__version__ = "0.1.0"

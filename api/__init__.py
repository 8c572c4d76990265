"""
HTTP API for the Prophecy oracle (FastAPI):
- /markets - register, inspect, dispute markets
- /evidence - submit evidence
- /resolve - trigger or schedule resolutions
- /reconsider - advisory reconsideration
- /logs - observable log stream
- /health, /stats

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"

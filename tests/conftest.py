from __future__ import annotations

import os

# main.py builds the application at import time and refuses to start without a token
os.environ.setdefault("MERCADOPAGO_ACCESS_TOKEN", "TEST-0000000000-conftest")
os.environ.setdefault("BACKEND_URL", "https://backend.example.com")

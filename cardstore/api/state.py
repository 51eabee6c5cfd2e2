from typing import Any, Dict

# Populated by main() before startup and by the lifespan handler
app_state: Dict[str, Any] = {}

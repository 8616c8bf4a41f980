"""
Configuration module for the call bridge.

Key components:
- constants: protocol event names, default endpoints and placeholder values.
- logging_config: console logging shared by every module.
- settings: the immutable ``Settings`` value loaded once at startup.

Usage examples:
```python
from convai_bridge.config.logging_config import configure_logging
from convai_bridge.config.settings import load_settings

logger = configure_logging()
settings = load_settings()  # raises ConfigurationError if anything required is missing
```
"""

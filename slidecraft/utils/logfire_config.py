"""
Centralized Logfire configuration for SlideCraft.
"""
import os
import logfire

_configured = False


def configure_logfire(force: bool = False) -> bool:
    """
    Configure Logfire with proper error handling.

    Args:
        force: Force reconfiguration even if already configured

    Returns:
        bool: True if successfully configured
    """
    global _configured

    if _configured and not force:
        return True

    token = os.getenv("LOGFIRE_TOKEN")
    if not token:
        # Silently disable if no token
        return False

    try:
        # Keep the project URL banner out of stdout
        os.environ['LOGFIRE_CONSOLE_NO_SHOW'] = '1'
        logfire.configure(
            token=token,
            service_name="slidecraft",
            service_version=os.getenv("APP_VERSION", "dev"),
            console=False
        )

        logfire.info("Logfire configured successfully")
        _configured = True
        return True

    except Exception as e:
        print(f"ERROR: Logfire configuration failed: {e}")
        _configured = False
        return False


def is_configured() -> bool:
    """Check if Logfire is configured."""
    return _configured


def instrument_agents() -> bool:
    """Instrument PydanticAI agents if Logfire is configured."""
    if not is_configured():
        configure_logfire()

    if not is_configured():
        return False

    try:
        # Instruments every pydantic-ai Agent, including the deck synthesizer
        logfire.instrument_pydantic_ai()
        logfire.info("PydanticAI instrumentation enabled")
        return True
    except Exception as e:
        logfire.error(f"Failed to instrument PydanticAI: {e}")
        return False

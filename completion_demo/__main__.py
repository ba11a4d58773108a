import asyncio
import sys
from .core.demonstrator import CompletionDemonstrator
from .core.errors import ComputationFailure
from .core.logger import configure_logging, logger
from .core.settings import DemoSettings


def main() -> int:
    settings = DemoSettings()
    configure_logging(settings.log_level, settings.log_file)

    print("Hello, World!")
    try:
        asyncio.run(CompletionDemonstrator(settings).run_all())
    except ComputationFailure as e:
        logger.bind(object_name="main").error(f"Demo aborted: {e.to_dict()}")
        return 1
    return 0


# python -m completion_demo
if __name__ == "__main__":
    sys.exit(main())

import sys
from st.common.logger import log
from st.ui.app import main

# Entry point for `python -m st` and the standup-timer script
def run() -> None:
    log.info("=== INITIALIZED NEW SESSION ===")
    try:
        main()
    except SystemExit:
        raise
    except Exception:
        # Full stack trace, always
        log.exception("Uncaught exception in entrypoint, exiting")
        sys.exit(1)

if __name__ == "__main__":
    run()

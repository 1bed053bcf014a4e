"""
Post-install script for setting up browser dependencies.

Downloads the Chromium browser Playwright drives for the LinkedIn session.
Exposed as the `linkedin-automation-install-browser` console script.
"""
import subprocess
import sys


def postinstall():
    """
    Run playwright install to download browser binaries.

    Run once after `pip install -e .`; later runs are no-ops when
    Chromium is already present.
    """
    print("Checking for browser installation...")

    print("Running 'playwright install chromium'...")
    try:
        result = subprocess.run(
            [sys.executable, "-m", "playwright", "install", "chromium"],
            check=True,
            capture_output=True,
            text=True
        )
        if result.stdout:
            print(result.stdout)
        print("Chromium browser installed successfully.")
    except subprocess.CalledProcessError as e:
        print(f"Error installing Chromium browser for Playwright: {e}", file=sys.stderr)
        if e.stderr:
            print(e.stderr, file=sys.stderr)
        print(
            "Please run the following command manually:\n"
            "  python -m playwright install chromium",
            file=sys.stderr
        )
        sys.exit(1)


if __name__ == "__main__":
    postinstall()

"""Batch jobs — command-line tasks registered on an app.

Run:
    wicket batch examples.batch.app:app              # list jobs
    wicket batch examples.batch.app:app sendEmails   # run one

Log files go to ``$WICKET_LOG_DIR`` (default: ``logs/`` next to this file).
"""

import os
from datetime import datetime
from pathlib import Path

from wicket import App, AppConfig
from wicket.logs import load_timezone

LOG_DIR = Path(os.environ.get("WICKET_LOG_DIR", Path(__file__).parent / "logs"))

app = App(AppConfig(debug=True, log_dir=LOG_DIR))


@app.batch("sendEmails")
def send_emails():
    print("Sending emails...")
    app.log("Emails sent successfully.")


@app.batch("cleanupLogs")
def cleanup_logs():
    print("Cleaning up logs...")
    today = datetime.now(load_timezone(app.config.timezone)).strftime("%Y-%m-%d")
    for path in sorted(LOG_DIR.glob("*.log")):
        # Keep today's log
        if path.name != f"{today}.log":
            print(f"Deleting {path.name}")
            path.unlink()
    app.log("Logs cleaned up.")


if __name__ == "__main__":
    raise SystemExit(app.run_batch())

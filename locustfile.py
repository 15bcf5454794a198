import os
from datetime import datetime

from locust import FastHttpUser, between, task

STATUS_DESCRIPTION_HEADER = "X-Status-Description"
TARGET_PATH = os.environ.get("TARGET_PATH", "/")


def get_log_file_name():
    run_name = os.environ.get("RUN_NAME")
    if run_name:
        return f"logs/{run_name}_locust_status_distribution.log"
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"logs/locust_status_distribution_{timestamp}.log"


class ProxyUser(FastHttpUser):
    wait_time = between(1, 5)

    def on_start(self):
        # Use a single base log file for all requests
        os.makedirs("logs", exist_ok=True)
        self.log_file = get_log_file_name()

    @task
    def fetch(self):
        # Injected errors are expected, so don't let locust count them as failures
        with self.client.get(TARGET_PATH, catch_response=True) as response:
            description = response.headers.get(STATUS_DESCRIPTION_HEADER, "unknown")
            response.success()
            # Log the status of this request on a new line
            with open(self.log_file, "a") as f:
                f.write(f"{response.status_code} {description}\n")

import sys

import termtables

from .constants import LOGS_PATH
from .helpers import create_dirs

CYAN = "\033[96m"
BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"

BOLD = "\033[1m"

END = "\033[0m"

DEPLOYMENTS_HEADER = ["#", "Contract", "Network", "Address", "Tx hash", "Gas used"]


class Logger:
    def __init__(self, log_file):
        self.log_file = log_file

    # log to file
    def log(self, text):
        create_dirs(self.log_file)
        with open(self.log_file, mode="a") as logs:
            logs.write(text + "\n")

    # results, the only console output on std out
    def stdout(self, text):
        print(text)

    # diagnostics
    def stderr(self, text):
        print(text, file=sys.stderr)

    def info(self, text, value=None):
        log_text = "🔵 [INFO] " + text
        console_text = self.hl(" 🔵 [INFO] ", BLUE) + text

        if value is not None:
            log_text = self.cln(log_text, value)
            console_text = self.cln(console_text, self.hl(value, BOLD))

        self.log(log_text)
        self.stderr(console_text)

    def okay(self, text, value=None):
        log_text = "🟢 [OKAY] " + text
        console_text = self.hl(" 🟢 [OKAY] ", GREEN) + text

        if value is not None:
            log_text += ": " + str(value)
            console_text += ": " + self.hl(value, BOLD)

        self.log(log_text)
        self.stderr(console_text)

    def warn(self, text, value=None):
        log_text = "🟠 [WARN] " + text
        console_text = self.hl(" 🟠 [WARN] ", YELLOW) + text

        if value is not None:
            log_text += ": " + str(value)
            console_text += ": " + self.hl(value, BOLD)

        self.log(log_text)
        self.stderr(console_text)

    def error(self, text, value=None):
        log_text = "🔴 [ERROR] " + text
        stderr_text = self.hl(" 🔴 [ERROR] ", RED) + text

        if value is not None:
            log_text += ": " + str(value)
            stderr_text += ": " + self.hl(value, BOLD)

        self.log(log_text)
        self.stderr(stderr_text)

    def report_table(self, table):
        log_table = termtables.to_string(
            table,
            header=DEPLOYMENTS_HEADER,
            style=termtables.styles.rounded_double,
        )
        self.log(log_table)

        stdout_table = [[self.hl(cell, GREEN) for cell in row] for row in table]
        table_colored_string = termtables.to_string(
            stdout_table,
            header=DEPLOYMENTS_HEADER,
            style=termtables.styles.rounded_double,
        )

        self.stdout(table_colored_string)

    def hl(self, text, color=BOLD):
        return f"{color}{text}{END}"

    def hlgreen(self, text):
        return self.hl(text, GREEN)

    def hlred(self, text):
        return self.hl(text, RED)

    def cln(self, text1, text2):
        return f"{text1}: {text2}"

    def divider(self):
        self.log(" - +" * 20)
        self.stderr((self.hlred(" -") + self.hlgreen(" +")) * 20)


logger = Logger(LOGS_PATH)

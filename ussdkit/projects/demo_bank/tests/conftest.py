# ussdkit/projects/demo_bank/tests/conftest.py
import os

# settings는 import 시점에 읽히므로 ussdkit.core 보다 먼저 설정한다
os.environ["LOG_TO_FILE"] = "false"
os.environ["DEV_MODE"] = "true"

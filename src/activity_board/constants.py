STATE_DIR_NAME = ".activity_board"
CONFIG_FILE = "config.yaml"
CONFIG_FILE_JSON = "config.json"
LOG_LEVEL_ENV_VAR = "ACTIVITY_BOARD_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

STAGE_TODO = "todo"
STAGE_IN_PROGRESS = "inProgress"
STAGE_REVIEW = "review"
STAGE_DONE = "done"

# Display order of the board.
STAGES = (STAGE_TODO, STAGE_IN_PROGRESS, STAGE_REVIEW, STAGE_DONE)

STAGE_TITLES = {
    STAGE_TODO: "To Do",
    STAGE_IN_PROGRESS: "In Progress",
    STAGE_REVIEW: "Review",
    STAGE_DONE: "Done",
}

PRIORITY_RANKS = {"low": 1, "medium": 2, "high": 3}
DEFAULT_PRIORITY = "medium"

MAX_RECENT_EVENTS = 200

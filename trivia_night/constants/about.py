"""Static metadata describing Trivia Night."""

APP_NAME = "Trivia Night"
APP_VERSION = "0.1"
APP_ABOUT_TEXT = (
    "Trivia Night is a party quiz for up to three groups. Spin the category wheel, "
    "answer questions, collect a badge in every category and win."
)

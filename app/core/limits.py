# Flashcard field bounds shared by schemas, models and the client library
FRONT_MAX_LENGTH = 200
BACK_MAX_LENGTH = 500

# Ids and text columns are INTEGER and VARCHAR(255) in the database
MAX_ID = 2**31 - 1
MAX_TEXT_LENGTH = 255

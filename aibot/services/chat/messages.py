"""Reply texts sent to chat users."""

WELCOME_TEMPLATE = (
    "Hello! I am AI bot v{version}.\n"
    "Ask me a question and I will answer it from the indexed documents.\n"
    "Send a PDF, JSON or XML file, or a link to one, to add it to the index."
)

EMPTY_QUERY_MESSAGE = "Please enter a query."

NO_MATCHES_MESSAGE = "No relevant matches found."

NO_TEXT_MESSAGE = "The document has no text to vectorize."

UNSUPPORTED_FILE_MESSAGE = "Unsupported file type. Please send a PDF, JSON or XML file."

INDEXED_TEMPLATE = "Document {source} has been indexed."

UNKNOWN_COMMAND_TEMPLATE = "Unknown command: /{command}"

UNSUPPORTED_MESSAGE = "Please send a text message, a document or a link to a document."

GENERIC_ERROR_MESSAGE = "Something went wrong while processing your request."

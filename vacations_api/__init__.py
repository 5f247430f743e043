"""Travel booking mock backend: FastAPI app over a JSON document store."""

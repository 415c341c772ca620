# main.py
import uvicorn

from ehr_api.application import create_app
from ehr_api.config import Settings

settings = Settings.from_env()
app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)

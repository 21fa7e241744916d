# -*- coding: utf-8 -*-
# Runs the Lotto AI Predictor API with uvicorn (PORT/HOST from the environment)
import logging
import os

import uvicorn

from lottoai.main import app

logging.basicConfig(level=logging.INFO)

def main():
    port = int(os.environ.get("PORT", 8000))
    host = os.environ.get("HOST", "0.0.0.0")
    uvicorn.run(app, host=host, port=port)

if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Run script for the Credit Report Service
"""
import uvicorn

from credit_report.config.settings import settings
from credit_report.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)

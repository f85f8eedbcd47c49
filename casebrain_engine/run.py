#!/usr/bin/env python3
"""
Quick runner for the Strategy Engine API
========================================

Usage:
    python -m casebrain_engine.run
"""

import logging

import uvicorn

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting Evidence-Coverage & Strategy Engine")
    logger.info("API docs: http://localhost:8000/docs")
    logger.info("Health:   http://localhost:8000/health")

    uvicorn.run(
        "casebrain_engine.api:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )

# Copyright The Volcano Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional, Union

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-40s | %(message)s'

_handlers_configured = False


def format_context(context: Optional[Dict[str, Any]]) -> str:
    """Render context as ``key=value`` pairs joined by `` | ``"""
    if not context:
        return ""
    return " | ".join(f"{k}={v}" for k, v in context.items())


def with_context(message: str, context: Optional[Dict[str, Any]] = None) -> str:
    rendered = format_context(context)
    return f"{message} | {rendered}" if rendered else message


def configure_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """Configure handlers at the root level, once per process"""
    global _handlers_configured

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if _handlers_configured:
        return

    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if specified
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _handlers_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; handlers live on the root logger"""
    return logging.getLogger(name)

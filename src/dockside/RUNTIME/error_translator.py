# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
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

"""
Translation of daemon failures into the dockside error taxonomy.
This is the only place where that mapping happens.
"""
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from ..errors import (
    BadGatewayError,
    DocksideError,
    ExecutableNotFoundError,
    RuntimeNotRunningError,
    ServerError,
)
from .transport import DaemonFailure, FailureKind, describe_failure

EXECUTABLE_NOT_FOUND_MARKER = "executable file not found"

Describer = Callable[[BaseException], DaemonFailure]


def translate(error: Exception, failure: DaemonFailure) -> Optional[DocksideError]:
    """
    Map a classified failure to a dockside error.

    Returns:
        The translated error, or None if the failure is not one we recognize.
    """
    if failure.kind is FailureKind.CONNECTION_REFUSED:
        return RuntimeNotRunningError(cause=error)

    if failure.kind is FailureKind.HTTP_STATUS:
        if failure.status_code == 502:
            return BadGatewayError(cause=error)
        if failure.status_code == 500:
            return ServerError(cause=error)
        if failure.status_code == 400 and EXECUTABLE_NOT_FOUND_MARKER in failure.message:
            return ExecutableNotFoundError(cause=error)

    return None


@contextmanager
def common_errors(describe: Describer = describe_failure) -> Iterator[None]:
    """
    Wrap a daemon-facing call, re-raising recognized failures as dockside errors.

    Already-translated errors and unrecognized ones propagate unchanged.

    Args:
        describe: Classifier of the transport in use.
    """
    try:
        yield
    except DocksideError:
        raise
    except Exception as error:
        translated = translate(error, describe(error))
        if translated is None:
            raise
        raise translated from error

#
# Copyright 2024 lgxpack Project Authors. All rights reserved.
# Use of this source code is governed by a MIT-style
# license that can be found at
#
# https://opensource.org/license/MIT
#
# The above copyright notice and this permission
# notice shall be included in all copies or
# substantial portions of the Software.

import subprocess
import time
from threading import Timer
from typing import List, Optional, Tuple


def decode_bytes(data: bytes) -> str:
    try:
        return bytes.decode(data, "UTF-8")
    except UnicodeDecodeError:
        return bytes.decode(data, "latin-1")


def exec_command(command: List[str], cwd: Optional[str] = None) -> Tuple[int, str]:
    # no timeout, external tools may legitimately run for hours
    return exec_command_with_timeout_second(command, None, cwd=cwd)


def exec_command_with_timeout_second(
    command: List[str],
    timeout_second: Optional[float] = None,
    cwd: Optional[str] = None,
    stdout=subprocess.PIPE,
    stderr=subprocess.STDOUT,
) -> Tuple[int, str]:
    """
    Run a command without a shell and capture its combined output.

    A command that cannot be started reports exit code 127.

    Returns:
        (exit_code, output)
    """
    start_mills = int(time.time() * 1000)
    try:
        popen = subprocess.Popen(command, cwd=cwd, stdout=stdout, stderr=stderr)
    except OSError as e:
        return 127, f"Failed to run {command[0]}: {e}"

    timer = None
    if timeout_second is not None:
        timer = Timer(timeout_second, lambda process: process.kill(), [popen])
    try:
        if timer:
            timer.start()
        out, err = popen.communicate()
    finally:
        if timer:
            timer.cancel()
    err_code = popen.returncode
    err_msg = decode_bytes(out) if out else ""
    if err_code == -9:
        if not err_msg and err:
            err_msg = decode_bytes(err)
        if not err_msg:
            use_time = int(time.time() * 1000) - start_mills
            err_msg = f"Failed for timeout({err_code}), use_time: {use_time}ms"
    return err_code, err_msg

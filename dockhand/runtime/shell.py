"""Subprocess execution helper for docker / docker compose."""

import asyncio
import logging

logger = logging.getLogger(__name__)


def make_run_cmd(dry_run=False):
    """Create a run_cmd callable for local execution.

    The returned coroutine function has the signature
    ``run_cmd(command, cwd=None, timeout=600, log_output=False) -> (rc, stdout, stderr)``
    where ``command`` is a list of arguments (never passed through a shell).
    """

    async def run_cmd(command, cwd=None, timeout=600, log_output=False):
        printable = " ".join(command)
        if dry_run:
            logger.info(f"[dry-run] {printable}" + (f"  (in {cwd})" if cwd else ""))
            return 0, "", ""

        logger.debug(f"$ {printable}" + (f"  (in {cwd})" if cwd else ""))
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.error(f"Error: '{command[0]}' not found. Is it installed and on PATH?")
            return 127, "", f"'{command[0]}' not found"

        try:
            if log_output:
                stdout_lines, stderr_lines = [], []

                async def _read_stream(pipe, lines, level):
                    async for raw_line in pipe:
                        line = raw_line.decode(errors="replace").rstrip("\n")
                        logger.log(level, line)
                        lines.append(line)

                await asyncio.wait_for(
                    asyncio.gather(
                        _read_stream(proc.stdout, stdout_lines, logging.INFO),
                        _read_stream(proc.stderr, stderr_lines, logging.INFO),
                        proc.wait(),
                    ),
                    timeout=timeout,
                )
                return proc.returncode, "\n".join(stdout_lines), "\n".join(stderr_lines)

            stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
            stdout = stdout_bytes.decode(errors="replace") if stdout_bytes else ""
            stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
            return proc.returncode, stdout, stderr
        except TimeoutError:
            logger.error(f"Command timed out after {timeout}s: {printable}")
            proc.kill()
            await proc.wait()
            return 1, "", ""

    return run_cmd

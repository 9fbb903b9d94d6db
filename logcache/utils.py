"""
Utility functions.
"""

import sys
from typing import Any, Dict, TextIO, Union
import json
from eth_typing.encoding import HexStr
from web3.datastructures import AttributeDict


class Web3JsonEncoder(json.JSONEncoder):
    """
    Custom encoder to parse `Web3 <https://web3py.readthedocs.io/en/stable/>`_ responses.
    By default `Web3 <https://web3py.readthedocs.io/en/stable/>`_ returns
    responses as ``AttributeDict`` with binary values.
    :class:`Web3JsonEncoder` thansforms it into the :code:`0x...`
    hex format.
    """

    def default(self, o: Any) -> Union[Dict[Any, Any], HexStr]:
        """
        Convert Web3 response to ``dict``
        """
        if isinstance(o, AttributeDict):
            return {k: v for k, v in o.items()}
        if isinstance(o, (bytes, bytearray)):
            return HexStr("0x" + bytes(o).hex())
        return json.JSONEncoder.default(self, o)


def json_response(response: AttributeDict) -> str:
    """
    Convert ``AttributeDict`` to standard json string

    Args:
        response: a `Web3 <https://web3py.readthedocs.io/en/stable/>`_ response

    Returns:
        json string
    """
    return json.dumps(response, cls=Web3JsonEncoder)


def short_address(address: str | None) -> str:
    """
    Converts ethereum address to short version (for display purposes only).

    Args:
        address: Ethereum address to shorten, ``None`` means any address

    Returns:
        Short version of the address.

    Examples:
        ::

            print(short_address("0x6B175474E89094C44Da98b954EedeAC495271d0F"))
            # 0x6B17...1d0F

    """
    if address is None:
        return "*"
    return f"{address[:6]}...{address[38:]}"


LAST_PROGRESS_BAR_LENGTH = 0
LAST_PERCENT = 0


def print_progress(
    iteration: int,
    total: int,
    prefix: str = "",
    suffix: str = "",
    decimals: int = 1,
    bar_length: int = 20,
    file: TextIO = sys.stdout,
):
    """
    Call in a loop to create terminal progress bar.

    Args:
        iteration: current iteration
        total: total iterations
        prefix: prefix string
        suffix: suffix string
        decimals: positive number of decimals in percent complete
        bar_length: character length of bar
        file: stream to write the bar to
    """
    global LAST_PROGRESS_BAR_LENGTH
    global LAST_PERCENT

    if total <= 0:
        return

    # Avoid too much output
    if iteration != total and iteration > 0 and iteration / total - LAST_PERCENT < 0.01:
        return

    LAST_PERCENT = iteration / total
    str_format = "{0:." + str(decimals) + "f}"
    percents = str_format.format(100 * (iteration / float(total)))
    filled_length = int(round(bar_length * iteration / float(total)))
    vert_bar = "█" * filled_length + "-" * (bar_length - filled_length)
    text = f"{prefix} |{vert_bar}| {percents}% {suffix}\r"
    _ = file.write(f"{' ' * LAST_PROGRESS_BAR_LENGTH}\r")
    _ = file.write(text)
    LAST_PROGRESS_BAR_LENGTH = len(text)

    if iteration == total:
        file.write("\n")
        file.flush()
        LAST_PERCENT = 0
        LAST_PROGRESS_BAR_LENGTH = 0

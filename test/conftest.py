from fixtures.general import w3, w3_mock, conn
from fixtures.logs import (
    logs_repo,
    ranges_repo,
    blocks_service,
    logs_fetcher,
    logs_service,
)

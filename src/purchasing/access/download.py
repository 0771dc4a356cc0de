"""Download consumption — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from purchasing.access.download_grant import DownloadGrant
from purchasing.domain import purchasing
from purchasing.errors import AuthorizationError

logger = structlog.get_logger(__name__)


@purchasing.command(part_of="DownloadGrant")
class RecordDownload:
    grant_id = Identifier(required=True)
    buyer_id = Identifier(required=True)


@purchasing.command_handler(part_of=DownloadGrant)
class RecordDownloadHandler:
    @handle(RecordDownload)
    def record_download(self, command):
        repo = current_domain.repository_for(DownloadGrant)
        grant = repo.get(command.grant_id)
        if str(grant.buyer_id) != str(command.buyer_id):
            raise AuthorizationError(f"Buyer {command.buyer_id} does not own download grant {command.grant_id}")

        grant.record_download()
        repo.add(grant)
        logger.info(
            "Download recorded",
            grant_id=str(grant.id),
            downloads_used=grant.downloads_used,
            download_limit=grant.download_limit,
        )

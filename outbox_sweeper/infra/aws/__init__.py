"""AWS client construction and error mapping."""

from outbox_sweeper.infra.aws.clients import AwsClients
from outbox_sweeper.infra.aws.exceptions import map_boto_error

__all__ = ["AwsClients", "map_boto_error"]

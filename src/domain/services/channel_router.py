"""Channel router: picks delivery channels for one recipient."""

from domain.entities.event import ActivityEvent, ChannelKind
from domain.entities.notification import NotificationPreference


def get_channels(
    event: ActivityEvent, preference: NotificationPreference | None
) -> frozenset[ChannelKind]:
    """Resolve the channels an event reaches a recipient on.

    In-app is on unless the recipient turned it off. Email additionally
    requires the event to declare the EMAIL channel. An empty result is a
    valid outcome, not an error.
    """
    channels: set[ChannelKind] = set()

    if preference is None or preference.in_app_enabled is not False:
        channels.add(ChannelKind.IN_APP)

    email_allowed = preference is None or preference.email_enabled is not False
    if email_allowed and event.declares(ChannelKind.EMAIL):
        channels.add(ChannelKind.EMAIL)

    return frozenset(channels)

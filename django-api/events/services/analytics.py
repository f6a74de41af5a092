"""Derived per-event metrics."""

from statistics import fmean

from events.domain import Analytics, AttendeeStatus, Event, EventStatus


class AnalyticsAggregator:
    """Recomputes Event.analytics from the attendee list.

    attendance_rate and average_rating are only computed once the event is
    completed; before that they keep their last known values.
    """

    def recompute(self, event: Event) -> Event:
        registrations = len(event.attendees)
        if event.status is not EventStatus.COMPLETED:
            return event.replace(
                analytics=Analytics(
                    registrations=registrations,
                    attendance_rate=event.analytics.attendance_rate,
                    average_rating=event.analytics.average_rating,
                )
            )

        attended = sum(1 for a in event.attendees if a.status is AttendeeStatus.ATTENDED)
        ratings = [a.feedback.rating for a in event.attendees if a.feedback is not None]
        return event.replace(
            analytics=Analytics(
                registrations=registrations,
                attendance_rate=(attended / registrations) * 100 if registrations else 0.0,
                average_rating=fmean(ratings) if ratings else 0.0,
            )
        )

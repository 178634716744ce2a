"""
Matching engine services. Each module takes a SQLAlchemy Session and owns its own transaction.

- availability_service: submit / withdraw / list slots
- eligibility, matching: candidate filtering and best-match selection
- scheduling_service: the commit transaction
- meeting_lifecycle: cancel / complete / no-show
- suggestion_service, rescoring_queue: background re-scoring
"""

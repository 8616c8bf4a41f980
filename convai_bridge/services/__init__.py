"""
Services module for external API integrations.

Key components:
- signed_url: ``SignedUrlRequester`` fetches a signed, single-use conversation URL
  from the agent backend for each call.
- twilio_calls: ``OutboundCallService`` places provider calls whose media stream
  is later bridged to the agent.
"""

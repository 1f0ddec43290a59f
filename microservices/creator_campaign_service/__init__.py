"""
Creator Campaign Service

Brand/creator campaign engine providing:
- Candidate matching of creators against campaign requirements
- Smart package recommendation for a linked creator
- Guarded campaign-creator link lifecycle with exactly-once order creation
- Funnel, spend and ROI aggregation per campaign

Port: 8260
"""

__version__ = "1.0.0"
__service__ = "creator_campaign_service"

"""
FormBridge - Services Layer
============================

Service Inventory:
    - ContentStore (abstract): read / conditional write against a versioned file store
    - GitHubContentStore: ContentStore over the GitHub REST contents API (httpx)
    - SubmissionVariant: price / catalog form definitions and record shapes
    - record_builder: record construction, slugs, image paths
    - record_list: JSON array codec for the record-list file
    - SubmissionService: validate → upload image → append record workflow
"""

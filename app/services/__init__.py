"""서비스 계층 — 점검/결함/차량/사용자 업무 규칙.

Business rules on top of the repositories: checklist fill-out state,
photo upload with compensation, role resolution, reports.
"""

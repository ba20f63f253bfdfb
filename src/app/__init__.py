"""
App layer: UI/API 서버 (FastAPI + HTMX).

역할:
- RequestContext: 전체 페이지/조각 렌더링, 쿠키, 페이지네이션
- 인증 단계: 세션 쿠키 → Identity
- 업로드 엔드포인트

주의: 폴더 구분
- src/app/templates/ → Jinja2 HTML (layouts/, components/)
- public/uploads/ → 업로드 파일 저장소 (설정으로 변경)
"""

# ussdkit/main.py
from fastapi import FastAPI

from ussdkit.core.api import create_ussd_router
from ussdkit.core.config import settings
from ussdkit.core.navigation import NavigationEngine
from ussdkit.projects.demo_bank.manifest import load_manifest

# ── 현재: 단일 메뉴 서비스 ──────────────────────────────────────────────────────
# 다른 프로젝트로 교체하려면 load_manifest import만 바꾸면 된다.
manifest = load_manifest()
engine = NavigationEngine.from_manifest(manifest)

ussd_router = create_ussd_router(engine)

app = FastAPI(title=settings.APP_NAME)
app.include_router(ussd_router)

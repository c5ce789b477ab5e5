"""
Planificateur APScheduler : rapport d'occupation quotidien.

Le job s'exécute chaque jour à OCCUPANCY_REPORT_HOUR et journalise les
étudiants dont le dernier passage est une entrée (encore dans la bibliothèque).
Aucune sortie n'est écrite automatiquement : le journal reste alimenté par les scans.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from librarytrack.config import settings
from librarytrack.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _log_occupancy_report() -> None:
    """
    Tâche planifiée : liste les étudiants encore présents.
    Import local pour éviter les imports circulaires.
    """
    from librarytrack.services.log_service import students_inside

    db = SessionLocal()
    try:
        inside = students_inside(db)
        logger.info("Rapport d'occupation : %d étudiant(s) encore présent(s).", len(inside))
        for log in inside:
            logger.info(
                "Présent depuis %s : %s (%s, %s)",
                log.timestamp, log.student_name, log.student_id.upper(), log.branch,
            )
    except Exception as exc:
        logger.error("Erreur lors du rapport d'occupation : %s", exc)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _log_occupancy_report,
        trigger="cron",
        hour=settings.OCCUPANCY_REPORT_HOUR,
        id="occupancy_report",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler démarré: rapport d'occupation chaque jour à %dh.", settings.OCCUPANCY_REPORT_HOUR)


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")

"""
Maritime AI - Startup Script
Command line entry point for serving the API and managing models
"""

import argparse
import asyncio
import sys

from maritime_ai.core.config import settings
from maritime_ai.utils.logger import setup_logging

def run_server(reload: bool = False):
    import uvicorn

    print(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    print(f"API Docs: http://{settings.host}:{settings.port}/api/docs")

    uvicorn.run(
        "maritime_ai.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )

async def _train():
    from maritime_ai.services.ai_service import AIService

    service = AIService(settings)
    try:
        await service.initialize(auto_train=False)
        results = await service.train_all_models()
        for name, history in results.items():
            print(f"{name}: val_mae={history.val_mae:.4f} over {history.epochs} epochs")
    finally:
        await service.dispose()

async def _status():
    from maritime_ai.services.ai_service import AIService

    service = AIService(settings)
    try:
        await service.initialize(auto_train=False)
        print(service.get_service_status().model_dump_json(by_alias=True, indent=2))
    finally:
        await service.dispose()

def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description=settings.app_name)
    parser.add_argument(
        "command",
        choices=["dev", "serve", "train", "status"],
        help="Command to execute",
    )
    args = parser.parse_args()

    setup_logging("maritime_ai", log_level=settings.log_level, log_file=settings.log_file)

    try:
        if args.command == "dev":
            run_server(reload=True)
        elif args.command == "serve":
            run_server(reload=False)
        elif args.command == "train":
            asyncio.run(_train())
        elif args.command == "status":
            asyncio.run(_status())
    except KeyboardInterrupt:
        print("\nStopped by user")
        sys.exit(0)

if __name__ == "__main__":
    main()

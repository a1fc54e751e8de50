from dotenv import load_dotenv
load_dotenv()
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from helpers.tortoise_config import lifespan
from controllers.quiet_hours_controller import quiet_hours_router
from controllers.reconcile_controller import reconcile_router


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


app = FastAPI(lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(quiet_hours_router, prefix='/api', tags=['Quiet Hours'])
app.include_router(reconcile_router, tags=['Reconcile'])


@app.get('/')
def greetings():
    return {
        "Message": "Quiet Hours Scheduler is running"
    }

import time, random, argparse, json, datetime, urllib.request
def post(api, path, payload, token=None):
    headers = {'Content-Type': 'application/json'}
    if token: headers['Authorization'] = f'Bearer {token}'
    req = urllib.request.Request(api + path, data=json.dumps(payload).encode('utf-8'), headers=headers)
    with urllib.request.urlopen(req, timeout=10) as resp:
        return json.loads(resp.read().decode())
def main():
    p = argparse.ArgumentParser(description="Stream refrigerator readings to the HACCP API")
    p.add_argument('--api', default='http://localhost:8000')
    p.add_argument('--username', default='super')
    p.add_argument('--password', default='super')
    p.add_argument('--facility', default='F1')
    p.add_argument('--fridge', default='K1')
    p.add_argument('--user', default='U-SUPER')
    p.add_argument('--checkpoint', default='Luft')
    p.add_argument('--mean', type=float, default=4.5)
    p.add_argument('--spread', type=float, default=2.0)
    p.add_argument('--rate', type=float, default=1.0)
    args = p.parse_args()
    token = post(args.api, "/auth/login", {"username": args.username, "password": args.password})["access_token"]
    print(f"Streaming to {args.api} for refrigerator {args.fridge} every {args.rate}s... CTRL+C to stop")
    while True:
        payload = {"target_id": args.fridge, "target_type": "refrigerator", "checkpoint_name": args.checkpoint,
            "value": round(random.gauss(args.mean, args.spread), 1), "timestamp": datetime.datetime.utcnow().isoformat(),
            "user_id": args.user, "facility_id": args.facility}
        try: post(args.api, "/readings/", payload, token); print("Sent", payload)
        except Exception as e: print("Error:", e)
        time.sleep(args.rate)
if __name__ == "__main__": main()
